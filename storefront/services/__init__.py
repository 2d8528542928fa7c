"""Service layer. Every public operation returns a {ok, data, error} envelope."""
