"""Process invocation, errors and validation shared by all commands."""
