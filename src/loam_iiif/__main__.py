from loam_iiif.cli import main

main()
