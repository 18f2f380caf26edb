"""Engine components: changes, treatment_tags, processor."""
