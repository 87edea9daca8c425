"""Allow running the launcher with `python -m app_launcher.cli`."""

from .main import main

if __name__ == "__main__":
    main()
