"""Resolution of declared dependencies and plugins against the local repository."""
