"""Quiz data model, answer matching and play sessions."""
