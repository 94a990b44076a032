# Base scenes served from the frontend's public/visuospatial directory.
VISUOSPATIAL_IMAGES = [
    "/visuospatial/base/kitchen.jpg",
    "/visuospatial/base/living_room.jpg",
    "/visuospatial/base/park.jpg",
    "/visuospatial/base/street.jpg",
    "/visuospatial/base/office.jpg",
    "/visuospatial/base/beach.jpg",
]
