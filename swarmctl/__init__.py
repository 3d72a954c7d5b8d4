"""swarmctl: a small control layer over Docker Swarm.

 - idempotent overlay network provisioning
 - replicated service creation with memory limits
 - reconciliation of live services/tasks/nodes into a per-service summary
 - name-based service deletion against a fresh snapshot

The swarm itself is the system of record; nothing here caches platform state.
"""
