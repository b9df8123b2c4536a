"""Service desk: resident tickets and delivery orders."""
