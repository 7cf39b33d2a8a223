# Rule engine for the 2048 sliding-tile puzzle, with a stateless HTTP API and a terminal driver.
