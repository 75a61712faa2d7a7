"""Core of GitLearn: content layer, record index and query engine."""
