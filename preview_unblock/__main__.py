"""Entry point for Preview Unblock.

Usage:
    python -m preview_unblock      Open the main window
"""


def main() -> None:
    """Launch the GUI app."""
    from preview_unblock.app import App

    app = App()
    app.run()


if __name__ == "__main__":
    main()
