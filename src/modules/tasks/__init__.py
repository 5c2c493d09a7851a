"""Tasks module: recurrence, skip/restore, rotation and dependency scheduling."""
