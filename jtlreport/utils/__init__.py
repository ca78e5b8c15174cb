"""Small helpers shared across jtlreport modules."""
