"""Ahoi: a tiny HTTP responder meant to be run on Kubernetes."""

__version__ = "0.1.0"
