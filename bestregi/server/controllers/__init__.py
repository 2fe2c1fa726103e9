"""
MVC controllers, discovered by the bootstrapper and served by the default route.
"""
