"""4004 CPU: registers, stack, SRC latch, ALU, decoder."""
