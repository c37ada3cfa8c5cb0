"""finsync command-line interface."""
