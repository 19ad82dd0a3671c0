"""Text analysis tools: n-gram counting, statistics, filtering and ranking."""
