"""Native HTML rendering of Jupyter notebooks."""
