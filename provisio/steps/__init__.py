"""Initializers that decide whether a piece of work should run."""