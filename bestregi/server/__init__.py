"""
BestRegi Server Package.

This package contains the web application: the bootstrapper, configuration,
identity, routing, MVC, middleware, controllers, pages and templates.

Subpackages:
    api: JSON probes (health, version).
    controllers: MVC controllers served by the default route.
    core: Configuration and constants.
    identity: Accounts, passwords, sign-in and cookie authentication.
    middleware: Request pipeline stages.
    mvc: Controller and page base classes, views and dispatch.
    pages: Page models routed by their location.
    routing: Route templates, discovery and the endpoint table.
"""
