"""Business logic for simulated storage nodes.

Node counters are only written through ``node_ledger``; the files
workflow calls it from inside its own atomic blocks.
"""
