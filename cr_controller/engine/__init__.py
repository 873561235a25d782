"""Run engine: shard lifecycle, execution, interrupts and coordination."""
