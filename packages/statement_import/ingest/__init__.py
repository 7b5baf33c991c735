"""Reader, column detection and row normalization stages."""
