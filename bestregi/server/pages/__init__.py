"""
Page models.

Every module below this package that defines a ``PageModel`` subclass is a
page; its URL is its module path in PascalCase.
"""
