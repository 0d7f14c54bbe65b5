"""Allow ``python -m flagfactory <api_token>``."""

from flagfactory.cli.main import main

if __name__ == "__main__":
    main()
