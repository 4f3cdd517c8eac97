"""Pure booking rules, calendar helpers and view-model projection."""
