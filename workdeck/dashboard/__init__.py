"""Interactive dashboard: state machine, view composer and Textual driver."""
