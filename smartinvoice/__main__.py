from smartinvoice.cli import cli

if __name__ == "__main__":  # pragma: no cover - script entry point
    cli()
