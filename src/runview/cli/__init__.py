"""runview command line interface."""
