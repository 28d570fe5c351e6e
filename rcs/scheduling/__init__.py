"""Background scheduling for periodic RCS recalculation."""
