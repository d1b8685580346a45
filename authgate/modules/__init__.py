"""authgate modules. Each is a black box behind its package interface."""
