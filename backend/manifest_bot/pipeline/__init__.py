"""Pure pipeline stages: response decoding and field normalization."""
