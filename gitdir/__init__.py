"""Status of every git repository in a directory."""
