"""Pure domain layer: DTOs, salary arithmetic, advance lifecycle, validation."""
