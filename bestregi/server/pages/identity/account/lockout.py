from bestregi.server.mvc import PageModel


class LockoutModel(PageModel):
    """Shown after too many failed sign-in attempts."""
