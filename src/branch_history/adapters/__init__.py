"""Host adapters for branch_history."""
