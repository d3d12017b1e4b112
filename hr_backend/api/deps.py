"""Accessors for the per-process components created in ``create_app``."""

from fastapi import Request

from hr_backend.core.config import Settings
from hr_backend.services.email_service import EmailService
from hr_backend.services.file_service import FileStorage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> FileStorage:
    return request.app.state.storage


def get_mailer(request: Request) -> EmailService:
    return request.app.state.mailer
