"""Small helpers shared across futureself."""
