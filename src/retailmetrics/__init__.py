# Import main lazily so the domain layer can be used without click
def __getattr__(name):
    if name == "main":
        from retailmetrics.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
