from bestregi.server.mvc import PageModel


class AccessDeniedModel(PageModel):
    """Shown when a signed-in user lacks the role an endpoint requires."""
