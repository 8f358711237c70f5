"""artledger command-line interface."""
