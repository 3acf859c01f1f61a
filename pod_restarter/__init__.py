"""
Pod Restarter - Kubernetes Pending Pod Remediator

Watches for Pods stuck in Pending because of a known infrastructure error
event and deletes them so their controller can recreate them.
"""

__version__ = "1.0.0"
