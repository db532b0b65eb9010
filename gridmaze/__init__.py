"""Grid Maze Levels service."""
