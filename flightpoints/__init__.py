"""Award-seat search across airline loyalty programs with a persistent result cache."""
