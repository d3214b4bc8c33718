"""Application layer: engines that coordinate domain services and I/O."""
