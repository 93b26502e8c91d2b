"""4001 program memory and 4002 data memory."""
