from autoturn.scenarios.sample_encounter import create_sample_encounter, create_sample_queues, FIGHTER_ID, MAGE_ID

__all__ = ["create_sample_encounter", "create_sample_queues", "FIGHTER_ID", "MAGE_ID"]
