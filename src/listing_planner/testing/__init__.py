"""Testing utilities – fakes for exercising the planner without a database."""
