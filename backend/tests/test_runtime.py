from app.ui import runtime
from app.ui.views import Redirect


async def test_open_pages_shares_one_client(monkeypatch, supabase_client) -> None:
    monkeypatch.setattr(runtime, "get_session_supabase_client", lambda: supabase_client)

    async with runtime.open_pages() as pages:
        assert supabase_client.auth.listeners
        form = pages.landing().render()
        form.toggle_mode()
        form.email = "a@b.com"
        form.password = "secret1"
        assert await form.submit() == Redirect(to="/profile")

        notes = pages.notes(confirm=lambda _: True)
        assert await notes.mount() is None
        notes.title = "T"
        notes.content = "C"
        assert await notes.create_note()
        assert supabase_client.notes.rows[0]["user_id"] == str(pages.session.user.id)

        await pages.session.sign_out()
        assert notes.redirect == Redirect(to="/")
        assert notes.notes == []

    assert supabase_client.auth.listeners == []
