"""
Vaccine Modules.

Orchestration layers over the kernel and engines:

- inventory: receiving shipments, recording administration, adjustments
- reporting: dashboard, monthly report, inventory listing, export

Processing logic lives in ``vaccine_engines``; persistence is reached
through a ``StorageCollaborator``.
"""
