from app.ui.auth_form import AuthForm, AuthMode
from app.ui.landing import LandingPage
from app.ui.session import SessionContext
from app.ui.views import Loading, Redirect


class ExplodingSession:
    async def sign_in(self, email, password):
        raise ConnectionError("offline")


async def test_missing_fields_never_reach_the_provider(auth_service, supabase_client) -> None:
    async with SessionContext(auth_service) as ctx:
        form = AuthForm(ctx)
        form.email = "a@b.com"
        assert await form.submit() is None
        assert form.error == "Please fill in all fields"
        assert not form.loading
    assert supabase_client.auth.accounts == {}


async def test_short_password_is_rejected(auth_service) -> None:
    async with SessionContext(auth_service) as ctx:
        form = AuthForm(ctx)
        form.toggle_mode()
        form.email = "a@b.com"
        form.password = "12345"
        assert await form.submit() is None
        assert form.error == "Password must be at least 6 characters"


async def test_sign_up_then_redirect_to_notes(auth_service) -> None:
    async with SessionContext(auth_service) as ctx:
        form = AuthForm(ctx)
        form.toggle_mode()
        assert form.mode is AuthMode.SIGNUP
        assert form.submit_label == "Sign Up"
        form.email = "a@b.com"
        form.password = "secret1"

        redirect = await form.submit()

        assert redirect == Redirect(to="/profile")
        assert form.error == ""
        assert ctx.user.email == "a@b.com"


async def test_provider_error_is_shown(auth_service) -> None:
    async with SessionContext(auth_service) as ctx:
        form = AuthForm(ctx)
        form.email = "ghost@b.com"
        form.password = "secret1"
        assert await form.submit() is None
        assert form.error == "Invalid login credentials"
        assert ctx.user is None


async def test_unexpected_error_is_generic() -> None:
    form = AuthForm(ExplodingSession())
    form.email = "a@b.com"
    form.password = "secret1"
    assert await form.submit() is None
    assert form.error == "An unexpected error occurred"
    assert not form.loading


def test_toggle_mode_clears_fields() -> None:
    form = AuthForm(ExplodingSession())
    form.email = "a@b.com"
    form.password = "secret1"
    form.error = "boom"
    form.toggle_mode()
    assert (form.email, form.password, form.error) == ("", "", "")
    assert form.heading == "Create New Account"
    form.toggle_mode()
    assert form.mode is AuthMode.LOGIN


async def test_landing_page_routes_by_session(auth_service) -> None:
    ctx = SessionContext(auth_service)
    landing = LandingPage(ctx)
    assert isinstance(landing.render(), Loading)

    async with ctx:
        assert landing.render() is landing.form
        await auth_service.sign_up("a@b.com", "secret1")
        assert landing.render() == Redirect(to="/profile")
