"""Pipeline stages that talk to the network or the filesystem."""
