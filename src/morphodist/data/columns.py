"""Column names shared by the loader, sampler and feature builder."""

# Object key in every measurement table
TABLE_NUMBER = "TableNumber"
IMAGE_NUMBER = "ImageNumber"
OBJECT_NUMBER = "ObjectNumber"
IMAGE_KEY = (TABLE_NUMBER, IMAGE_NUMBER)
OBJECT_KEY = (TABLE_NUMBER, IMAGE_NUMBER, OBJECT_NUMBER)

# Plate/well columns of the Image table
IMAGE_PLATE = "Image_Metadata_Plate"
IMAGE_WELL = "Image_Metadata_Well"

# Raw annotation columns
BARCODE = "Assay_Plate_Barcode"
PLATE_MAP_NAME = "Plate_Map_Name"
RAW_WELL_POSITION = "well_position"
RAW_PLATE_MAP_NAME = "plate_map_name"
SAMPLE = "broad_sample"

# Namespaced metadata columns
METADATA_PREFIX = "Metadata_"
METADATA_PLATE = METADATA_PREFIX + "Plate"
METADATA_WELL = METADATA_PREFIX + "Well"
METADATA_SAMPLE = METADATA_PREFIX + SAMPLE
METADATA_PLATE_MAP_NAME = METADATA_PREFIX + PLATE_MAP_NAME
WELL_KEY = (METADATA_PLATE, METADATA_WELL)
