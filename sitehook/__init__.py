"""sitehook - serves a built documentation site and redeploys it on signed pushes."""
__version__ = "0.1.0"
