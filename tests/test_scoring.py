from intentlocator.models import ElementDescriptor, Role
from intentlocator.scoring import REJECTED_SCORE, score_element


def test_login_field_prefers_text_input_with_login_keyword() -> None:
    login = ElementDescriptor(tag="input", input_type="text", name="login")
    search = ElementDescriptor(tag="input", input_type="text", name="search")
    password = ElementDescriptor(tag="input", input_type="password", name="password")

    assert score_element(Role.LOGIN_FIELD, login) == 7.0
    assert score_element(Role.LOGIN_FIELD, search) == 5.0
    assert score_element(Role.LOGIN_FIELD, password) <= 0.0


def test_matching_test_attribute_adds_strong_signal() -> None:
    tagged = ElementDescriptor(tag="input", input_type="text", test_attribute=("data-testid", "login-input"))
    untagged = ElementDescriptor(tag="input", input_type="text")

    assert score_element(Role.LOGIN_FIELD, tagged) == 9.5
    assert score_element(Role.LOGIN_FIELD, untagged) == 5.0


def test_russian_keywords_count_like_english_ones() -> None:
    field = ElementDescriptor(tag="input", label_text="Имя пользователя")
    secret = ElementDescriptor(tag="input", input_type="password", placeholder="Пароль")

    assert score_element(Role.LOGIN_FIELD, field) == 7.0
    assert score_element(Role.PASSWORD_FIELD, secret) == 9.0


def test_password_field_scoring() -> None:
    password = ElementDescriptor(tag="input", input_type="password", name="pwd")
    email = ElementDescriptor(tag="input", input_type="email", name="email")

    assert score_element(Role.PASSWORD_FIELD, password) == 9.0
    assert score_element(Role.PASSWORD_FIELD, email) == 2.0


def test_login_button_penalizes_registration_actions() -> None:
    sign_in = ElementDescriptor(tag="button", surrounding_text="Sign in")
    sign_up = ElementDescriptor(tag="button", surrounding_text="Sign up")
    link = ElementDescriptor(tag="a", aria_label="Log in with SSO")
    submit = ElementDescriptor(tag="input", input_type="submit", title="Continue")

    assert score_element(Role.LOGIN_BUTTON, sign_in) == 6.0
    assert score_element(Role.LOGIN_BUTTON, sign_up) == 1.5
    assert score_element(Role.LOGIN_BUTTON, link) == 1.0
    assert score_element(Role.LOGIN_BUTTON, submit) == 6.0


def test_button_ignores_placeholder_text() -> None:
    button = ElementDescriptor(tag="button", placeholder="login")

    assert score_element(Role.LOGIN_BUTTON, button) == 3.0


def test_hidden_and_aria_hidden_elements_are_rejected() -> None:
    hidden = ElementDescriptor(tag="input", input_type="hidden", name="login")
    aria_hidden = ElementDescriptor(tag="input", name="login", surrounding_text="Login [hint:aria-hidden=true]")

    for role in Role:
        assert score_element(role, hidden) == REJECTED_SCORE
        assert score_element(role, aria_hidden) == REJECTED_SCORE


def test_scoring_is_deterministic() -> None:
    descriptor = ElementDescriptor(tag="textarea", placeholder="E-mail or phone")

    scores = {score_element(Role.LOGIN_FIELD, descriptor) for _ in range(5)}
    assert scores == {5.0}
