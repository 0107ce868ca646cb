"""
statusgate - readiness prober sidecar for clustered databases.

Aggregates every database node's failure-detector view of its peers into
a single readiness verdict, and gates region bootstrap on the readiness of
the regions configured before it.
"""
