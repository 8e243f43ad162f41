"""Installation of Spark distributions."""
