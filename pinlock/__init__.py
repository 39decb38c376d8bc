"""pinlock: pin, save and sync the dependencies of a multi-repository workspace."""
