"""Text and JSON representations of decoded ROM data."""
