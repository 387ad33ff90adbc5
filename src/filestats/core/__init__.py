"""Aggregation engine: classifiers, top-K tracking, aggregators and models."""
