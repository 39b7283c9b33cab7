"""DevOps CLI for registry pushes, image scans and Terraform remote state."""

__version__ = "0.3.0"
