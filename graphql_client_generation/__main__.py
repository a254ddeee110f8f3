"""Entry point: python -m graphql_client_generation"""

from .cli import main

if __name__ == "__main__":
    main()
