"""Double-entry bookkeeping with VAT, corporate tax and financial statements."""

__version__ = "0.1.0"


# Import main and Books lazily to avoid circular dependencies
def __getattr__(name):
    if name == "main":
        from ledgerly.cli.main import main
        return main
    if name == "Books":
        from ledgerly.books import Books
        return Books
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
