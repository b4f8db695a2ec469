"""jbuild - compile step orchestration for Java source trees."""

__version__ = "0.1.0"
