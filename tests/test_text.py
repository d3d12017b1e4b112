from hr_backend.core.text import enforce_case, to_title_case


def test_title_case():
    assert to_title_case("JOÃO DA SILVA") == "João Da Silva"


def test_enforce_case_only_touches_all_caps():
    assert enforce_case("MARIA") == "Maria"
    assert enforce_case("maria de souza") == "maria de souza"
    assert enforce_case("McDonald") == "McDonald"


def test_enforce_case_leaves_caseless_values():
    assert enforce_case("12345678901") == "12345678901"
    assert enforce_case("") == ""
    assert enforce_case(None) is None
    assert enforce_case(42) == 42
