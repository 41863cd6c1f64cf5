"""spinguard: SPIN class constraints for RDF graphs."""

__version__ = "0.3.0"
