"""BestRegi.

A server-rendered registration web application. Requests pass through an
ordered middleware pipeline and end at either an MVC controller action or a
page model, both rendered with Jinja2 templates.

High-level architecture
-----------------------

- ``bestregi.core``:

  - Logging and monitoring setup.
  - The persistence context (``BestRegiContext``) built on async SQLModel,
    plus the identity user entity and its repository.

- ``bestregi.server``:

  - Configuration (``Settings``) and the application bootstrapper.
  - The identity subsystem (password hashing, user and sign-in managers,
    cookie authentication).
  - Conventional and page routing, controllers, pages and middleware.

Typical startup
---------------

``python -m bestregi.server`` loads the settings, fails fast when the
``BestRegiContextConnection`` connection string is missing, builds the
application with ``bestregi.server.main.create_app`` and serves it with
uvicorn.
"""
